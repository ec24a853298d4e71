"""Mflix Core -- 领域模型、任务投影与持久化"""
