"""PQScoreboard Web Interface"""
