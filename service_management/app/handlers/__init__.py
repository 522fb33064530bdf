"""
Management handlers.

One handler per entity, each dispatching on the event's `operation` field:

- users: createUser, resetPassword
- clients: createClient, updateClient
- applications: createApplication, updateApplication
- user_applications: createUserApplication, updateUserApplication
"""
