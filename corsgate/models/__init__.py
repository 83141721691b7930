"""corsgate models package.

Defines the shared data contracts used by the policy engine and the filter:

  - request.py    — HTTPMethod, RequestType, CorsTags (per-request context)
  - decision.py   — Decision, CorsError, CorsErrorKind, Verdict, Action
  - responses.py  — Response builders for denials and successful preflights

These models are the single source of truth for the engine/filter contract.
"""
