"""
Neural network cars learning to drive a track by mutation-only evolution.
"""
