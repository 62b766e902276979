"""
Pet Butler - A chat assistant that looks after your pet.

New chats are onboarded one question at a time (see the onboarding
package); onboarded chats talk to an LLM that knows the pet's profile.
"""

__version__ = "1.0.0"
