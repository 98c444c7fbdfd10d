"""Command line interface for reviewsync"""
