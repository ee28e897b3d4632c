"""
Markdown / HTML export tests: section gating, fixed order, findings block.
"""

from pmcopilot.features.exports.html_export import prd_to_html
from pmcopilot.features.exports.markdown_export import Assessment, prd_to_markdown
from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections


def _form(**overrides):
    base = dict(
        title="Checkout v2",
        problem="Carts are abandoned.",
        solution="One-page checkout.",
        objectives=["Reduce abandonment"],
        userStories=["As a shopper, I want fewer steps"],
        requirements=["Support Apple Pay", ""],
    )
    base.update(overrides)
    return PRDFormData(**base)


def test_all_sections_in_fixed_order():
    """Every enabled section appears, Problem through Requirements"""
    md = prd_to_markdown(_form(), PRDSections())
    headings = [line for line in md.splitlines() if line.startswith("## ")]
    assert headings == [
        "## Problem Statement",
        "## Solution Overview",
        "## Objectives",
        "## User Stories",
        "## Requirements",
    ]
    assert md.startswith("# Checkout v2\n\n## Problem Statement\nCarts are abandoned.")
    assert md.endswith("- Support Apple Pay\n")


def test_disabled_sections_leave_no_heading():
    """Toggled-off sections are omitted entirely"""
    md = prd_to_markdown(_form(), PRDSections(userStories=False, requirements=False))
    assert "## User Stories" not in md
    assert "## Requirements" not in md
    assert "As a shopper" not in md
    assert "## Objectives\n- Reduce abandonment" in md


def test_empty_title_falls_back():
    """Untitled PRDs get the default heading"""
    md = prd_to_markdown(_form(title=""), PRDSections())
    assert md.startswith("# Product Requirements Document\n")


def test_findings_only_with_assessment():
    """No assessment, no Findings block"""
    assert "## Findings" not in prd_to_markdown(_form(), PRDSections())


def test_findings_block_format():
    """Score and gaps render after the last section"""
    md = prd_to_markdown(_form(), PRDSections(), Assessment(score=72, gaps=["No metrics", "No risks"]))
    assert md.endswith("## Findings\nScore: 72/100\n\nGaps:\n- No metrics\n- No risks\n")


def test_findings_without_gaps():
    """An empty gap list renders as None"""
    md = prd_to_markdown(_form(), PRDSections(), Assessment(score=100))
    assert "Gaps:\n- None\n" in md


def test_html_escapes_and_gates_sections():
    """HTML export escapes content and follows the same toggles"""
    html = prd_to_html(_form(problem="<b>x</b> & y"), PRDSections(solution=False))
    assert "&lt;b&gt;x&lt;/b&gt; &amp; y" in html
    assert "Solution Overview" not in html
    assert "<li>Support Apple Pay</li>" in html
    assert "Exported via PM Copilot" in html
