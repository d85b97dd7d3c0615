"""Content service for programs, research, testimonials and other site collections."""
