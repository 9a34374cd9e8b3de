"""history_bridge - copy new conversations from a watched SQLite store into daily history files."""
