"""Colonoscopy Scheduler: a chat relay between the booking web client and an LLM.

Architecture Overview
=====================

Each ``POST /api/chat`` runs one pass of a small **LangGraph** pipeline:

1. **filter**: narrows the appointments the frontend offered using keywords
   in the patient's message (doctor name, month, morning/afternoon).

2. **assistant**: builds a system prompt from the clinic's scheduling rules,
   the filtered appointments and the frontend's booking state, then makes a
   single call to the Anthropic model.

3. **classify**: decides whether the reply reads like it is presenting
   options, in which case the filtered appointments are returned with it.

Key Design Decisions
--------------------
- **Stateless**: the frontend owns the conversation state and sends it with
  every message.  Nothing is cached or stored between requests.
- **No retries**: a failed completion is reported once, mapped to a friendly
  message by error category (credentials, rate limit, quota, other).
- **Static clinic data**: physician schedules and keyword tables are frozen
  dataclasses passed into the pure functions, not mutable globals.

Package Structure
-----------------
- ``colonoscopy_scheduler/agent.py``: LangGraph pipeline definition
- ``colonoscopy_scheduler/config.py``: environment / SSM configuration
- ``colonoscopy_scheduler/clinic.py``: physician schedules and facility info
- ``colonoscopy_scheduler/models.py``: appointment and conversation models
- ``colonoscopy_scheduler/prompts.py``: system prompt assembly
- ``colonoscopy_scheduler/server.py``: FastAPI application
- ``colonoscopy_scheduler/main.py``: CLI chat interface
- ``colonoscopy_scheduler/services/``: filter, reply classifier, completion client, metrics
- ``colonoscopy_scheduler/api/``: FastAPI routes and Pydantic schemas
"""
