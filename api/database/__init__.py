"""
Runtime database administration (create / connect / status).
"""
