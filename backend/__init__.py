"""
Studio Feedback Desk backend
"""
