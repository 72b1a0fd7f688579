"""
Test suite for Web Digest.

Unit tests for each module plus pipeline tests over in-memory fakes.
"""
