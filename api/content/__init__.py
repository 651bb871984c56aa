"""
Message board: create, list and delete entries in `msg_contents`.
"""
