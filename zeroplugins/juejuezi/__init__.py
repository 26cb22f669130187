"""The juejuezi sentence generator client."""