"""Metric models, encoders and telemetry aggregation"""
