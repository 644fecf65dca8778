"""
Code Judge - interview question grading service

This package contains the core components for grading submitted code:
- models: Data structures for questions, test cases and results
- sandbox: Isolated JavaScript execution with time and memory limits
- grader: Test case execution and scoring
- repository: Question lookup and running statistics
- api: HTTP endpoints
"""

__version__ = "1.0.0"
