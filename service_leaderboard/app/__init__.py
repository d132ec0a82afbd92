"""
PUBG leaderboard service application package.
"""
