"""
API schema exports.
"""
