import re

from storyguard.compliance import Match, find_matches


def test_finds_every_occurrence_left_to_right():
    pattern = re.compile("痩せる|痩せます")
    assert find_matches(pattern, "痩せる！絶対痩せます") == [
        Match("痩せる", 0, 3),
        Match("痩せます", 6, 10),
    ]


def test_matches_do_not_overlap():
    assert [m.text for m in find_matches(re.compile("ああ"), "あああ")] == ["ああ"]


def test_wildcard_gap_is_lazy():
    pattern = re.compile("飲んだら.*?(?:治った|消えた)")
    matches = find_matches(pattern, "飲んだら消えた、また飲んだら治った")
    assert [m.text for m in matches] == ["飲んだら消えた", "飲んだら治った"]


def test_no_match_is_empty_list():
    assert find_matches(re.compile("完治"), "リラックスタイム") == []


def test_empty_and_non_string_text():
    pattern = re.compile("完治")
    assert find_matches(pattern, "") == []
    assert find_matches(pattern, None) == []
    assert find_matches(pattern, 123) == []
