"""
Web API for package quotes and currency conversion.
"""
