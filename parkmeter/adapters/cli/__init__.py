"""CLI adapter for the interactive demo driver.

Maps text commands to AllocationPort operations and returns results as
dictionaries; printing is left to the REPL in main.py.
"""
