"""Backend access and the OTP flow state machines."""
