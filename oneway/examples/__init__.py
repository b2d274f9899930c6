"""
Reference features used by the demo command and the test suite.
"""
