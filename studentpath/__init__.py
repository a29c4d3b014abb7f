"""
StudentPath Career Platform
A career-platform API for students, colleges and working professionals.

Architecture:
- PostgreSQL: Structured data (students, colleges, placements, plans, resumes)
- MongoDB: Unstructured documents (resume text, AI extraction drafts)
- LLM (OpenAI-compatible): Resume feedback, plan generation, review extraction
"""

__version__ = "1.0.0"
