import unittest

from cutbot.discord.embeds import (
    COLOR_ERROR,
    COLOR_INFO,
    COLOR_SUCCESS,
    build_error_embed,
    build_help_embed,
    build_history_embed,
    build_ladder_embed,
    build_match_deleted_embed,
    build_match_embed,
    build_stats_embed,
    build_user_created_embed,
    format_ladder_table,
)


def history_match(n):
    return {
        "matchNumber": n,
        "matchId": 100 + n,
        "playedAt": "2024-03-01T12:00:00Z",
        "winner": "alice",
        "loser": "bob",
        "score": "10-3",
        "winnerRatingChange": 15.2,
        "loserRatingChange": -15.2,
        "scoreWeight": 0.95,
    }


class TestLadderEmbed(unittest.TestCase):
    def test_table_row_layout(self):
        table = format_ladder_table([
            {"rank": 1, "username": "alice", "rating": 1623.4, "wins": 5, "losses": 2, "ratingDeviation": 87.2},
            {"rank": 12, "username": "bob", "rating": 1377, "wins": 0, "losses": 4, "ratingDeviation": 120},
        ])

        self.assertEqual(table.splitlines(), [
            "# 1 " + "alice".ljust(15) + " 1623 5-2  87",
            "#12 " + "bob".ljust(15) + " 1377 0-4 120",
        ])

    def test_null_numbers_render_as_zero(self):
        table = format_ladder_table([
            {"rank": 3, "username": "newbie", "rating": None, "wins": None, "losses": 0, "ratingDeviation": None},
        ])

        self.assertEqual(table, "# 3 " + "newbie".ljust(15) + "    0 0-0   0")

    def test_empty_ladder(self):
        embed = build_ladder_embed({"players": [], "pagination": {"page": 1, "totalPages": 1, "totalPlayers": 0}})

        self.assertEqual(embed.title, "🏆 CUT Ladder Rankings")
        self.assertEqual(embed.description, "No players registered yet. Use `/inputuser` to register!")
        self.assertEqual(embed.fields, [])

    def test_paged_ladder_has_navigation_footer(self):
        embed = build_ladder_embed({
            "players": [{"rank": 26, "username": "carol", "rating": 1500, "wins": 1, "losses": 1, "ratingDeviation": 200}],
            "pagination": {"page": 2, "totalPages": 3, "totalPlayers": 60},
        })

        self.assertEqual(embed.description, "Page 2 of 3 • 60 Players")
        self.assertTrue(embed.fields[0].value.startswith("```\n#26 carol"))
        self.assertEqual(embed.footer.text, "Page 2/3 • Use buttons to navigate")
        self.assertEqual(embed.color, COLOR_INFO)


class TestHistoryEmbed(unittest.TestCase):
    def test_no_matches(self):
        embed = build_history_embed([], {"page": 1, "limit": 25, "totalMatches": 0, "totalPages": 1})

        self.assertEqual(embed.description, "No matches recorded")
        self.assertEqual(embed.fields[0].name, "No Matches")

    def test_range_and_footer(self):
        matches = [history_match(n) for n in range(26, 31)]

        embed = build_history_embed(matches, {"page": 2, "limit": 25, "totalMatches": 30, "totalPages": 2})

        self.assertEqual(embed.description, "Showing matches 26-30 of 30")
        self.assertEqual(embed.footer.text, "Page 2 of 2 • Total Matches: 30")
        self.assertEqual(len(embed.fields), 1)
        value = embed.fields[0].value
        self.assertIn("**#26** (ID: 126) | 2024-03-01", value)
        self.assertIn("alice **10-3** bob", value)
        self.assertIn("Rating: +15.2 / -15.2 | Weight: 0.950", value)

    def test_long_pages_are_split_across_fields(self):
        matches = [history_match(n) for n in range(1, 13)]

        embed = build_history_embed(matches, {"page": 1, "limit": 25, "totalMatches": 12, "totalPages": 1})

        self.assertEqual([f.name for f in embed.fields], ["Matches", "\u200b"])
        self.assertTrue(all(len(f.value) <= 1024 for f in embed.fields))


class TestMatchEmbeds(unittest.TestCase):
    def test_recorded_match(self):
        embed = build_match_embed({
            "matchId": 42,
            "winner": {"username": "alice", "ratingBefore": 1500, "ratingAfter": 1516, "ratingChange": 16,
                       "rankBefore": 4, "rankAfter": 3},
            "loser": {"username": "bob", "ratingBefore": 1490, "ratingAfter": 1474, "ratingChange": -16,
                      "rankBefore": 3, "rankAfter": 4},
            "score": {"winner": 10, "loser": 3},
            "scoreWeight": 0.9,
            "playedAt": "2024-03-01T12:00:00Z",
        })

        self.assertEqual(embed.color, COLOR_SUCCESS)
        self.assertEqual([f.name for f in embed.fields], ["Winner", "Loser", "Match Details"])
        self.assertIn("Score: 10-3", embed.fields[0].value)
        self.assertIn("1500 → 1516 (+16)", embed.fields[0].value)
        self.assertIn("Score: 3-10", embed.fields[1].value)
        self.assertIn("(-16)", embed.fields[1].value)
        self.assertIn("Score Weight: 0.900", embed.fields[2].value)
        self.assertEqual(embed.footer.text, "Match #42 • 2024-03-01T12:00:00Z")

    def test_missing_timestamp_footer(self):
        embed = build_match_embed({"matchId": 7})

        self.assertEqual(embed.footer.text, "Match #7")

    def test_deleted_match_reports_recalculation_errors(self):
        embed = build_match_deleted_embed({
            "deletedMatch": {"id": 9, "winner": "alice", "loser": "bob", "score": "10-2"},
            "recalculation": {"matchesProcessed": 40, "totalMatches": 41, "success": False, "errors": ["x"]},
        })

        self.assertIn("**ID:** 9", embed.fields[0].value)
        self.assertIn("40/41", embed.fields[1].value)
        self.assertIn("❌ Failed", embed.fields[1].value)
        self.assertEqual(embed.fields[2].name, "⚠️ Errors")


class TestOtherEmbeds(unittest.TestCase):
    def test_user_created(self):
        embed = build_user_created_embed({"username": "alice", "twitchName": "alice_tv", "discordId": "42",
                                          "rating": 1500, "ratingDeviation": 350, "volatility": 0.06})

        self.assertIn("**alice**", embed.description)
        self.assertIn("Discord: <@42>", embed.fields[0].value)

    def test_stats_summary_and_detailed(self):
        stats = {
            "user": {"username": "alice", "rank": 2, "totalPlayers": 10},
            "rating": {"current": 1600, "deviation": 80, "trend": "up"},
            "record": {"wins": 7, "losses": 3, "winPercentage": 70, "totalMatches": 10},
            "recentForm": {"last5": "WWLWW", "last10": "WWLWWLWWLW"},
            "streaks": {"current": {"type": "win", "count": 2}},
        }

        summary = build_stats_embed(stats)
        detailed = build_stats_embed(stats, detailed=True)

        self.assertEqual(summary.title, "📊 alice's Statistics")
        self.assertEqual([f.name for f in summary.fields], ["Overview", "Recent Form"])
        self.assertIn("Rank: #2 of 10", summary.fields[0].value)
        self.assertEqual(
            [f.name for f in detailed.fields], ["Overview", "Performance", "Recent Form", "Current Streak"]
        )
        self.assertEqual(detailed.fields[3].value, "2 wins")

    def test_stats_with_missing_streak_count(self):
        for count in (None, "3"):
            with self.subTest(count=count):
                embed = build_stats_embed(
                    {"user": {"username": "alice"}, "streaks": {"current": {"type": "loss", "count": count}}},
                    detailed=True,
                )
                names = [f.name for f in embed.fields]
                self.assertEqual("Current Streak" in names, count is not None)

    def test_error_embed(self):
        embed = build_error_embed("Invalid scores", ["Winner score must be higher"])

        self.assertEqual(embed.color, COLOR_ERROR)
        self.assertEqual(embed.footer.text, "Use /help for command reference")
        self.assertEqual(embed.fields[0].value, "• Winner score must be higher")

    def test_help_lists_every_command(self):
        text = "\n".join(f.value for f in build_help_embed().fields)

        for name in ("inputuser", "deleteuser", "mystats", "recordmatch", "stats", "ladder", "history"):
            self.assertIn(f"`/{name}", text)


if __name__ == "__main__":
    unittest.main()
