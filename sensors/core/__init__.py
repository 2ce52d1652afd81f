"""Sensor interfaces"""
