from bb_scrape.core.html import (
    TagBlock,
    cell_text,
    find_ci,
    has_class,
    inner_after_open_tag,
    iter_tag_blocks,
    next_tag_block,
    read_digits,
    slice_between,
    strip_tags,
)

DOC = "<TABLE class=x><TR><td>A</TD><Td>B</td></tr><tr><td>C</td></tr></TABLE>"


def test_find_ci_is_case_insensitive_and_positional():
    assert find_ci("abcABC", "abc") == 0
    assert find_ci("abcABC", "abc", 1) == 3
    assert find_ci("abc", "zzz") == -1


def test_slice_between_returns_text_after_opening_tag():
    assert slice_between(DOC, "<table", "</table>") == (
        "<TR><td>A</TD><Td>B</td></tr><tr><td>C</td></tr>"
    )
    assert slice_between(DOC, "<ul", "</ul>") is None
    assert slice_between("<table class=x", "<table", "</table>") is None


def test_next_tag_block_offsets():
    block = next_tag_block(DOC, "<td", "</td>")
    assert isinstance(block, TagBlock)
    assert block.text(DOC) == "<td>A</TD>"
    assert block.opener(DOC) == "<td>"
    assert block.inner(DOC) == "A"
    assert block.start < block.open_end <= block.end


def test_next_tag_block_from_offset_and_past_end():
    first = next_tag_block(DOC, "<td", "</td>")
    second = next_tag_block(DOC, "<td", "</td>", first.end)
    assert second.text(DOC) == "<Td>B</td>"
    assert next_tag_block(DOC, "<td", "</td>", len(DOC) + 1) is None
    assert next_tag_block("<td>unclosed", "<td", "</td>") is None


def test_iter_tag_blocks_visits_each_block_once():
    cells = [b.inner(DOC) for b in iter_tag_blocks(DOC, "<td", "</td>")]
    assert cells == ["A", "B", "C"]
    rows = list(iter_tag_blocks(DOC, "<tr", "</tr>"))
    assert len(rows) == 2


def test_inner_after_open_tag():
    assert inner_after_open_tag("<td class=a>x <b>y</b></td>") == "x <b>y</b>"
    assert inner_after_open_tag("no tags") == ""


def test_strip_tags_drops_markup_and_normalizes_whitespace():
    assert strip_tags("<b>a</b>  b > c") == "a b c"
    assert strip_tags("  <i>x</i>\n\ty  ") == "x y"


def test_cell_text_decodes_known_entities():
    assert cell_text("<td>Al&nbsp;Vance &amp; co</td>") == "Al Vance & co"


def test_has_class_quoting_variants():
    assert has_class('<tr class="playerrow">', "playerrow")
    assert has_class("<tr class='odd playerrow1'>", "playerrow1")
    assert has_class("<td class=namecheck>", "NameCheck")
    assert not has_class('<tr class="playerrow1">', "playerrow")
    assert not has_class("<tr id=playerrow>", "playerrow")


def test_read_digits():
    assert read_digits("W12 x", 1) == "12"
    assert read_digits("W x", 1) == ""
    assert read_digits("123") == "123"
