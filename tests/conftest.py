from typing import List

import pytest

from bb_scrape.models.team import Team

TEAM_NAMES = [
    "Storm",
    "Stormriders",
    "Iron Wall",
    "Eduslum Marching Band",
    "Failurewood Hills",
]

INJURY_DOC = (
    "<html><head><title>Brutalball Injury Report - Season 31</title></head><body>"
    "<h3>Injuries</h3><br>\n"
    "<b>W7</b> StormridersBob Smith DUR 3 Broken Ribs by Iron WallJoe Bloggs BRU 40 Drops from 12 to 10<br>\n"
    "W8 StormJane Doe SR 14 DUR 0 Killed by Eduslum Marching BandMax Power BRU 55 BOUNTY COLLECTED<br>\n"
    "W9 Iron WallSam Stone DUR 2 Concussion by StormridersAl Vance BRU 12 BOUNTY COLLECTED, drops from 9 to 7<br>\n"
    "W10 Mystic Owls Lee Park DUR 1 Sprain by Grumpy Goblin BRU 5<br>\n"
    "Weekly summary DUR pending<br>\n"
    "W12 Solo DUR 2 Trip by Storm BRU 1<br>\n"
    "Nothing to see here<br>\n"
    "</body></html>"
)

ROSTER_DOC = """
<html><head><title>Failurewood Hills</title></head><body>
<table class=teamroster>
  <tr><td colspan=10><h5>Failurewood Hills (6 - 0 - 2) Team owner Foo</h5></td></tr>
  <th>Name</th><th>MA</th><th>ST</th>
  <tr class="playerrow"><td>[CAPTAIN] Bob Smith #7 Common Drakon</td><td>6</td><td>3</td></tr>
  <tr class="playerrow1"><td>Al&nbsp;Vance #12 Orc</td><td>5</td><td><b>4</b></td></tr>
  <tr class="teamfooter"><td>Totals</td><td>11</td><td>7</td></tr>
</table>
</body></html>
"""

SEASON_DOC = """
<html><head><title>Brutalball Schedule - Season 31</title></head><body>
<table class=nav><tr><td>Menu</td></tr></table>
<table>
  <tr><td colspan=4 class="conference">WEEK 1</td></tr>
  <tr class="playerrow">
    <td class="basichome"><a href="team.php?i=2">Iron Wall</a> <strong>2</strong></td>
    <td>-</td>
    <td class="basicaway"><strong>1</strong> <a href="team.php?i=0">Storm</a></td>
    <td><a href="game.php?i=555">view</a></td>
  </tr>
  <tr class="playerrow1">
    <td class="basichome"><a href="team.php?i=1">Stormriders</a></td>
    <td>-</td>
    <td class="basicaway"><a href="team.php?i=4">Failurewood Hills</a></td>
    <td></td>
  </tr>
</table>
<table>
  <tr><td class="conference">Week 2</td></tr>
  <tr class="playerrow">
    <td><a href="team.php?i=3">Eduslum Marching Band</a> <em>3</em></td>
    <td>-</td>
    <td><a href="team.php?i=0">Storm</a> <em>0</em></td>
    <td><a href='game.php?i=777'>x</a></td>
  </tr>
</table>
</body></html>
"""


@pytest.fixture
def teams() -> List[Team]:
    return [Team(team_id=i, name=name) for i, name in enumerate(TEAM_NAMES)]


@pytest.fixture
def injury_doc() -> str:
    return INJURY_DOC


@pytest.fixture
def roster_doc() -> str:
    return ROSTER_DOC


@pytest.fixture
def season_doc() -> str:
    return SEASON_DOC
