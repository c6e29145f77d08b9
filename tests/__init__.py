"""
Test package for the ServiceNow table client.
"""
