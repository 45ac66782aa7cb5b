"""Evals attendance package.

Organized by feature modules (attendees, events, attendance) with a thin Flask
controller layer on top of service/repository layers.
"""
