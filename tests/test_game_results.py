from bb_scrape.extractors.game_results import (
    detect_season,
    extract_game_results,
    extract_match_id,
    extract_side,
    extract_week_number,
)
from bb_scrape.models.pages import GAME_RESULTS_HEADERS


def test_extract_game_results(season_doc):
    bundle = extract_game_results(season_doc)
    assert bundle.headers == GAME_RESULTS_HEADERS
    assert bundle.rows == [
        ["31", "1", "Storm", "1", "2", "Iron Wall", "555"],
        ["31", "1", "Failurewood Hills", "", "", "Stormriders", ""],
        ["31", "2", "Storm", "0", "3", "Eduslum Marching Band", "777"],
    ]


def test_flip_sides_swaps_home_and_away(season_doc):
    bundle = extract_game_results(season_doc, flip_sides=True)
    assert bundle.rows[0] == ["31", "1", "Iron Wall", "2", "1", "Storm", "555"]


def test_season_fallback():
    doc = "<title>Schedule</title>" + (
        '<table><tr><td class="conference">Week 3</td></tr>'
        '<tr class="playerrow"><td><a>A Team</a></td><td></td><td><a>B Team</a></td></tr></table>'
    )
    assert extract_game_results(doc, season_fallback="29").rows == [
        ["29", "3", "B Team", "", "", "A Team", ""]
    ]
    assert extract_game_results(doc).rows[0][0] == ""


def test_short_rows_and_non_week_tables_are_skipped():
    doc = (
        '<table><tr><td class="conference">Standings</td></tr>'
        '<tr class="playerrow"><td><a>A</a></td><td>-</td><td><a>B</a></td></tr></table>'
        '<table><tr><td class="conference">Week 4</td></tr>'
        '<tr class="playerrow"><td><a>A</a></td><td><a>B</a></td></tr></table>'
    )
    assert extract_game_results(doc).rows == []


def test_detect_season():
    assert detect_season("<title>Brutalball Schedule - Season 31</title>") == "31"
    assert detect_season("<title>SEASON: 7 of many</title>") == "7"
    assert detect_season("<title>Schedule</title>") == ""
    assert detect_season("<p>season 3</p>") == ""


def test_extract_week_number():
    assert extract_week_number('<tr><td class="conference">WEEK 12</td></tr>') == "12"
    assert extract_week_number("<tr><td class=conference>Playoffs</td></tr>") is None
    assert extract_week_number("<tr><td>Week 1</td></tr>") is None


def test_extract_side_prefers_strong_then_em():
    assert extract_side('<td><strong>3</strong> <a href="x">Iron Wall</a></td>') == ("Iron Wall", "3")
    assert extract_side("<td><a>Storm</a> <em>(2)</em></td>") == ("Storm", "2")
    assert extract_side("<td><a>Storm 2000</a></td>") == ("Storm", "")


def test_extract_match_id():
    assert extract_match_id('<td><a href="game.php?i=4321">view</a></td>') == "4321"
    assert extract_match_id("<td><a href=game.php?i=12 class=x>v</a></td>") == "12"
    assert extract_match_id('<td><a href="team.php?i=3">t</a></td>') == ""
    assert extract_match_id("<td></td>") == ""


def test_extract_side_takes_whichever_score_element_comes_first():
    assert extract_side("<td><em>4</em> <a>Storm</a> <strong>9</strong></td>") == ("Storm", "4")
    assert extract_side("<td><strong>9</strong> <a>Storm</a> <em>4</em></td>") == ("Storm", "9")
