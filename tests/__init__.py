"""
Test suite for the docx_templater package.
"""
