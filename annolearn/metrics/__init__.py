"""
Scoring of predictions against gold annotations
"""
