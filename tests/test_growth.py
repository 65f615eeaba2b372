from storyguard.services.growth import engagement_stats, percent_change, summarize_preferences


def test_no_modifications_means_no_preferences():
    assert summarize_preferences([]) is None
    assert summarize_preferences([[]]) is None


def test_unchanged_text_has_no_trend():
    mods = [[{"original_text": "そのまま", "modified_text": "そのまま"}]]
    assert summarize_preferences(mods) is None


def test_trends_counted_and_ranked():
    batches = [
        [
            {"original_text": "とても長い元の台本テキストです", "modified_text": "短く"},
            {"original_text": "朝のひととき", "modified_text": "朝のひととき☕"},
        ],
        [{"original_text": "長めのコピーをここに書く", "modified_text": "短い"}],
    ]
    summary = summarize_preferences(batches)
    lines = summary.splitlines()

    assert lines[0] == "- 文言を独自に調整する傾向（過去3回）"
    assert "- テキストを短くする傾向（過去2回）" in lines
    assert "- 絵文字を追加する傾向（過去1回）" in lines


def test_top_n_limits_output():
    batches = [[{"original_text": "a" * 10, "modified_text": "b" * 20 + "✨"}]]
    assert len(summarize_preferences(batches, top_n=1).splitlines()) == 1


def test_percent_change():
    assert percent_change(0, 0) == 0
    assert percent_change(5, 0) == 100
    assert percent_change(150, 100) == 50
    assert percent_change(50, 100) == -50
    assert percent_change(1, 3) == -67


def test_engagement_stats_sums_and_compares():
    recent = [{"impressions": 120, "reactions": 10, "dm_count": 2}, None, {"impressions": 80}]
    previous = [{"impressions": 100, "reactions": 20}]
    stats = engagement_stats(recent, previous, script_count=4)
    assert stats == {
        "totalImpressions": 200,
        "totalReactions": 10,
        "totalDmCount": 2,
        "scriptCount": 4,
        "impressionChange": 100,
        "reactionChange": -50,
    }
