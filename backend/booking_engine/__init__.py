"""Booking lifecycle & scheduling engine backend."""
