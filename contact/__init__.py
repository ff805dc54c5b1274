"""
Contact Form App

Server-side handler for the website contact form:
- Input sanitization and email header-injection protection
- Honeypot, timestamp and CAPTCHA spam protection
- Category based recipient routing
- Plain-text email dispatch through Django's mail backend

Every request ends in a redirect to a fixed success or failure page.
"""
