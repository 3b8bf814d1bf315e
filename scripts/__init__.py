"""
Station Map Scripts

Scripts:
- build_station_features.py: Station table -> point features for the map renderer
"""
