"""
Neuroevolution of reflex-game controllers.

Small feed-forward networks ("genomes") learn to play a real-time
runner game by genetic search: every genome plays one live session,
its score becomes its fitness, and truncation selection, single-point
crossover and uniform weight mutation breed the next generation.
"""
