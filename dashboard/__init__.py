"""User & Role Dashboard - cached access to the user/role REST API."""
