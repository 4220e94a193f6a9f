"""
Core upload logic.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
or any infrastructure concerns. The uploader only knows about the
MultipartBackend protocol, so it can be tested against an in-memory fake.
"""
