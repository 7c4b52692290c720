"""filedrop: file upload/download service with a Redis-backed metadata cache."""
