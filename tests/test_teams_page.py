from bb_scrape.extractors.teams import extract_teams, teams_from_bundle
from bb_scrape.models.bundle import OutputBundle
from bb_scrape.models.team import Team

LEAGUE_TABLE_DOC = """
<table class="league">
  <tr>
    <td class="namecheck"><a href="team.php?i=3">Eduslum Marching Band</a> (6-0-2)</td>
    <td class="stat">12</td>
  </tr>
  <tr><td class="namecheck"><a href="team.php?i=1">Stormriders</a></td></tr>
  <tr><td class="namecheck"><a href=team.php?i=40>Ghost Team</a></td></tr>
  <tr><td class="namecheck"><a href="team.php?i=1">Duplicate</a></td></tr>
</table>
<ul class="mega-links"><li><a href="team.php?i=9">Menu Only</a></li></ul>
"""

MEGA_MENU_DOC = """
<table><tr><td>No league table here</td></tr></table>
<ul class="menu"><li><a href="team.php?i=8">Not a team menu</a></li></ul>
<ul class="mega-links">
  <li><a href="/brutalball/team.php?i=2">Iron Wall</a></li>
  <li><a href='team.php?i=0'>Storm</a></li>
  <li><a href="about.php">About</a></li>
</ul>
"""


def test_league_table_is_preferred():
    bundle = extract_teams(LEAGUE_TABLE_DOC)
    assert bundle.headers == ["Id", "Team"]
    assert bundle.rows == [["1", "Stormriders"], ["3", "Eduslum Marching Band"]]


def test_falls_back_to_mega_menu():
    bundle = extract_teams(MEGA_MENU_DOC)
    assert bundle.rows == [["0", "Storm"], ["2", "Iron Wall"]]


def test_no_teams_at_all():
    assert extract_teams("<p>maintenance</p>").rows == []


def test_teams_from_bundle_skips_bad_rows():
    bundle = OutputBundle(
        headers=["Id", "Team"],
        rows=[["0", "Storm"], ["x", "Bad"], ["40", "Too Big"], ["5"], ["2", "Iron Wall"]],
    )
    assert teams_from_bundle(bundle) == [
        Team(team_id=0, name="Storm"),
        Team(team_id=2, name="Iron Wall"),
    ]
