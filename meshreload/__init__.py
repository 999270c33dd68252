"""Service-mesh sidecar helpers.

 - a reloader that finds a sibling container in the same ECS task and
   signals it whenever a watched file changes
 - a small dtab CLI that writes routing tables to Consul and calls the
   gateway for a given environment
"""
