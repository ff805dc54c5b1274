"""
Centralized test suite for the contact form gateway.

Test Organization:
- integration/ - End-to-end submissions through the URL configuration
- App-specific tests remain in their respective app directories (e.g., contact/tests.py)
"""
