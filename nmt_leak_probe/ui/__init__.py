"""
Console and dashboard presentation
"""
