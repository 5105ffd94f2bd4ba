"""Scoring, diagnosis and improvement pipeline."""
