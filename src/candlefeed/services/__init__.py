"""
Services package containing the history engine and the datafeed collaborators.
"""
