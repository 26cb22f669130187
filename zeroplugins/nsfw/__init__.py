"""Verdicts from image classifier scores."""