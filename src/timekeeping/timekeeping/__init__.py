"""Timekeeping package.

Time-entry and shift workflow engine for a multi-tenant workforce backend.
Feature modules (time_entries, shifts, users) each carry a model, a repository
protocol with a MySQL adapter, a service layer and a thin Flask controller.
"""
