"""Same-origin JSON proxy routes for the ProConnect backend API"""
