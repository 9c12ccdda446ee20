"""Core building blocks: exceptions, logging, interfaces, background tasks."""
