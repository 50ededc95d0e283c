"""Kind listers.

One module per OpenStack resource kind. Each module defines the Resource
subclass for the kind (including its deletion cascade) and the lister that
pages the service catalog. ``registry`` wires them to service connections.
"""
