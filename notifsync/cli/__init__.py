"""
notifsync CLI - Command-line interface for the notification sync engine.

Commands:
- login / logout: Manage the stored session token
- config: Show and change configuration
- list, read, read-all, delete: One-shot notification operations
- prefs: Show and change notification preferences
- watch: Run the sync engine in the foreground
"""
