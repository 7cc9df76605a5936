"""
End-to-end load test against a running restaurant directory.
"""
