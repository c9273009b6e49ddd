"""
Planscope - report scoping for work-plan hierarchies.

Turns a selected workplan source, goal, objective or activity into a
pruned tree annotated with T/TA session summaries, ready for report
generation.
"""

__version__ = "0.1.0"
