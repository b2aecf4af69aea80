"""
Ball Runner Package
===================

Endless side-scrolling runner: a ball falls under gravity, the player taps to
make it jump, and every box it breaks is worth points. Touching the ground or
a hazard ends the run.

All tunable parameters live in game_config.yaml.
"""
