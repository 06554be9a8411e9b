"""SpellRank Utilities Package"""
