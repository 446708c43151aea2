"""Static Grand Exchange item pages built from the RuneScape Wiki price API."""
