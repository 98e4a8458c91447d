"""
clipvault
Command line application for clipboard history archives.
"""
