"""
Dolu Logistics - parcel pickup booking, zone pricing and tracking backend
"""
