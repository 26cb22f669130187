"""Senso-ji fortune slip texts and images."""