"""
Fanout Dispatcher.

Appends a posted status to the updates of each of the poster's friends.
"""
