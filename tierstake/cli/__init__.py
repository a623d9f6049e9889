"""tierstake command-line tools."""
