"""
Service Organization
====================
Services are organized by what they talk to:

**cloud/**
  Clients for the Tuya IoT cloud: request signing, token acquisition and
  valve commands. Stateless apart from the shared HTTP session.

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: IrrigationController, AutoCloseScheduler, SessionAuthenticator
"""
