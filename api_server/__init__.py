"""Debate Judge HTTP API"""
