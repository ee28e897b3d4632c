"""
Offline cache service worker for the frontend shell.

The script is rendered here so the cache name and the precache list live
next to the API that serves them. Bump CACHE_VERSION to drop every cache
written by an older worker on its next activation.

Strategy (GET requests only):
- cached response present -> serve it
- otherwise fetch from the network and store a copy
- network failure -> the cached response, which may be absent
"""

from __future__ import annotations

import json
from typing import Sequence

CACHE_PREFIX = "pmcopilot-cache"
CACHE_VERSION = 1
PRECACHE_URLS: tuple[str, ...] = ("/", "/index.html")


def cache_name(version: int = CACHE_VERSION) -> str:
    return f"{CACHE_PREFIX}-v{version}"


_TEMPLATE = """const CACHE_NAME = {cache_name};
const CORE = {core};

self.addEventListener('install', (event) => {{
  event.waitUntil(caches.open(CACHE_NAME).then(cache => cache.addAll(CORE)));
}});

self.addEventListener('activate', (event) => {{
  event.waitUntil(
    caches.keys().then(keys => Promise.all(keys.filter(k => k !== CACHE_NAME).map(k => caches.delete(k))))
  );
}});

self.addEventListener('fetch', (event) => {{
  const {{ request }} = event;
  if (request.method !== 'GET') return;
  event.respondWith(
    caches.match(request).then(cached => {{
      if (cached) return cached;
      return fetch(request).then(resp => {{
        const copy = resp.clone();
        caches.open(CACHE_NAME).then(cache => cache.put(request, copy));
        return resp;
      }}).catch(() => cached);
    }})
  );
}});
"""


def render_service_worker(
    *,
    version: int = CACHE_VERSION,
    precache: Sequence[str] = PRECACHE_URLS,
) -> str:
    return _TEMPLATE.format(cache_name=json.dumps(cache_name(version)), core=json.dumps(list(precache)))
