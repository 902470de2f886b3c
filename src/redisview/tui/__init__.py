"""Textual front end and session core for redisview."""
