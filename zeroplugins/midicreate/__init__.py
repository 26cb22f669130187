"""MIDI files from note strings, WAV rendering and an ear-training game."""